"""Modelling utilities (Bayesian linear regression demo)."""
