"""
apps.entities
~~~~~~~~~~~~~
Exposes Edge API products and developer apps as local entity types with
generated web routes.
"""
