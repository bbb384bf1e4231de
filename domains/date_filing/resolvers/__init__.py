"""
Date Filing Resolvers

Effective-date strategies per file type and the .msg reader capability.
"""
