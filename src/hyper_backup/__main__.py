from hyper_backup.cli import run

run()
