from qen.main import app

app()
