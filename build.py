#!/usr/bin/env python3
from mdsite.cli import app

if __name__ == "__main__":
    app()
