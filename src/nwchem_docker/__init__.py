"""Run NWChem in Docker and convert NWChem input decks to Broombridge."""

__version__ = "0.1.0"
