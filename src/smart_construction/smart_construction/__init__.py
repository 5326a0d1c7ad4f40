"""Smart Construction package.

Workforce management for construction sites, organized by feature modules
(companies, teams, sites, workers, reports, payroll, ...) with a thin Flask
controller layer over service/repository layers.
"""
