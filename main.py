from rich.pretty import pprint

from beetroot import *


@command("""migrate
    {action(*run {--step=1 : Run this many migrations}|rollback {batch : How many batches to undo})}
    {--pretend : Dump the SQL queries that would be run}""")
def migrate(action, batch=None, step=None, pretend=False):
    """Run or roll back the database migrations."""


# Slot 0 is the command name, so branches resolve when the command is typed first:
#     python main.py migrate rollback 5
if __name__ == '__main__':
    pprint(migrate.definition)
    migrate.help()
