from docdb_demo.models.options import (
    ClientOptions,
    ClientOptionsBuilder,
    ReadConcernLevel,
    TransactionOptions,
    WriteConcernLevel,
)
from docdb_demo.models.person import Person
from docdb_demo.models.report import DemoReport, StepMetrics, TransactionOutcome

__all__ = [
    "ClientOptions",
    "ClientOptionsBuilder",
    "DemoReport",
    "Person",
    "ReadConcernLevel",
    "StepMetrics",
    "TransactionOptions",
    "TransactionOutcome",
    "WriteConcernLevel",
]
