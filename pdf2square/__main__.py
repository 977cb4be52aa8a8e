from pdf2square.cli.main import app


app(prog_name="pdf2square")
