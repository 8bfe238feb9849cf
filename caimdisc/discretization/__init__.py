'''
# Discretization CAIM
Python implementation of Kurgan and Cios' CAIM (Class-Attribute
Interdependence Maximization) discretization algorithm

**Reference:**

Kurgan, Lukasz A., and Krzysztof J. Cios. "CAIM discretization algorithm." IEEE Transactions on Knowledge and Data Engineering 16.2 (2004): 145-153.

**Pieces:**

* boundaries: candidate boundaries from a sorted column (exhaustive or class optimized)
* scheme: intervals of one column and their nominal labels
* quanta: class x interval counts and the CAIM value
* search: greedy insertion of the best boundary
* projection: replace values by interval labels
* model: learned schemes and their persistence
'''
