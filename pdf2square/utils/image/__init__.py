"""Image helpers: background colours, letterboxing and async file IO."""
