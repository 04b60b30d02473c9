"""
External collaborators: Data Dragon, image conversion, object storage.
"""
