"""
Domain services for ArchCanvas.

Contains the editor's services, leaf first:
- taxonomy: static resource catalog and default templates
- graph_model: the canonical node/edge graph
- connection_rules: which category pairs may be connected
- editor: the interaction state machine, sole writer of the graph
- persistence: save/load/list/delete and file export/import
"""
