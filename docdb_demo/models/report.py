from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime

from docdb_demo.models.person import Person


class StepMetrics(BaseModel):
    """Metrics collected while running one step of the demo"""
    step: str = Field(..., description="Step name")
    execution_time_ms: float = Field(..., description="Step execution time in milliseconds")
    documents_affected: int = Field(default=0, description="Number of documents returned or affected")
    timestamp: datetime = Field(..., description="Step completion timestamp")


class TransactionOutcome(BaseModel):
    """Counts observed while a transaction was open"""
    outside_count: int = Field(..., description="Count issued without the session (pre-transaction state)")
    inside_count: int = Field(..., description="Count issued with the session (transaction state)")


class DemoReport(BaseModel):
    """Everything the demo observed, in step order"""
    inserted_count: int = Field(default=0, description="Records inserted by the bulk insert")
    page: List[Person] = Field(default_factory=list, description="First page of records")
    client_side_total_age: int = Field(default=0, description="Sum of ages accumulated by a full scan")
    server_side_total_age: int = Field(default=0, description="Sum of ages computed by the aggregation pipeline")
    index_name: Optional[str] = Field(None, description="Name of the age index")
    matched_count: int = Field(default=0, description="Records matched by the point update")
    modified_count: int = Field(default=0, description="Records modified by the point update")
    projected: Optional[Dict[str, Any]] = Field(None, description="Projected record, age excluded")
    deleted_count: int = Field(default=0, description="Records removed by the bulk delete")
    remaining_count: int = Field(default=0, description="Records left after the bulk delete")
    transaction: Optional[TransactionOutcome] = Field(None, description="Counts observed during the transaction")
    steps: List[StepMetrics] = Field(default_factory=list, description="Per-step metrics")
