from klinscore.cli import app

app(prog_name="klinscore")
