import random
from typing import Optional
from app.schemas import ProcessedValue

VALUE_MIN = 1
VALUE_MAX = 100

def generate_value(rng: Optional[random.Random] = None) -> int:
    """Draw a value uniformly from VALUE_MIN..VALUE_MAX (inclusive)"""
    rng = rng or random
    return rng.randint(VALUE_MIN, VALUE_MAX)

def transform(value: int) -> ProcessedValue:
    """Processor transform: double the value"""
    return ProcessedValue(original=value, processed=value * 2)
