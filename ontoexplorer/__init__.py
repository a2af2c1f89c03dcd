"""
Ontology Explorer: search, detail and relation-graph browsing for an ontology server.
"""

__version__ = "0.1.0"
