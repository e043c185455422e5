"""
Articles feature: keyset-paginated search over articles and the article write path.
"""
