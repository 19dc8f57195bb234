"""
Scheduler plugins: the protocols in `api`, and built-in submitters, filters and scorers.
The `registry` maps names used in config files to the built-in filters and scorers
"""
