"""
Collaborator interfaces for the pathways data service.
"""
