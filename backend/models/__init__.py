# Importing the modules registers every table on Base.metadata
from models import users, category, client, product, command, log  # noqa: F401
