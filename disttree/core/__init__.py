"""Core data handling for the clustering pipeline.

Submodules:
- clusterfile: Sectioned cluster file parsing
- groups: Sequence-to-group assignment
- centroids: Group centroids in the embedding
- distances: Distance matrix construction
- input: Pairwise distance table loading
- output: Result writers
"""

__all__ = ['clusterfile', 'groups', 'centroids', 'distances', 'input', 'output']
