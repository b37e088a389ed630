"""
Application glue: JSON view data shared by the web API and the CLI.
"""
