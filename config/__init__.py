"""
Configuration Package

Modules:
    registry: dataset URLs and config.yaml settings
    validation: required dataset columns and SchemaMismatchError
"""
