"""
Data Package

Modules:
    loader: cached loading of the raw grosses and synopses tables
    cleaning: the grosses cleaning pipeline and theatre domain
    aggregations: ranking and time-series summaries over cleaned grosses
"""
