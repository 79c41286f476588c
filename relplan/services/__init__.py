"""Application services for relplan.

Services implement the planning logic, coordinating between the domain types
in core/ and the infrastructure in git/ and platform/. They never import the
CLI layer.
"""
