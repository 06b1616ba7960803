"""mirrorshuttle - Stage and promote files without public write access.

Mirrors the directory structure of a protected target tree into a staging
tree, and later moves files written into the staging tree back into the
protected tree with integrity-checked transfers.
"""

__version__ = "0.1.0"
