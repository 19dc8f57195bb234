"""
kubesim is a discrete-time simulator of a cluster scheduler: a fixed set of nodes with
finite capacity, a stream of workloads from pluggable submitters, and a filter-then-score
pipeline deciding which workload goes on which node and when.

The package is organised as follows:
 - clock, core, node and workqueue define the data model: virtual time, workloads, node state
 - plugins declares the Submitter/Filter/Scorer protocols and ships built-in implementations
 - scheduler is the filter -> score -> select pipeline for a single workload
 - sim is the tick-driven loop binding the pipeline's decisions to nodes, fed by ticker
 - config and logconfig cover file based configuration, __main__ is the cli entrypoint
"""
