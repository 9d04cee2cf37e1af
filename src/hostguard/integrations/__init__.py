"""
Framework integrations for hostguard.

Import the submodule for the framework you use; each one needs its optional
extra installed.
"""
