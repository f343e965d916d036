from pydantic import BaseModel, Field, StrictInt

class ProducedValue(BaseModel):
    value: StrictInt = Field(description="Raw value generated by the producer")

class ProcessedValue(BaseModel):
    original: StrictInt = Field(description="Value as received from the producer")
    processed: StrictInt = Field(description="Value after the processor transform")

class ErrorResponse(BaseModel):
    error: str

class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str
