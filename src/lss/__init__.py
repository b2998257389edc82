"""lss - a leaked secret scanner.

lss scans a directory tree, and the full history of any git repositories
found directly beneath it, for lines that look like leaked credentials:
API keys, tokens, private keys and other high-entropy secrets. Detection
is rule based (regular expressions with tags and a confidence weight) and
corroborated with Shannon entropy.
"""

__version__ = "0.1.0"
