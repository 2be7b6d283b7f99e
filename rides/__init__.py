"""
Rides domain package.

Public API:
- Domain models: UserRecord, RideRecord
- Errors: DataValidationError, NotFoundError
- Dataset loading: parse_csv, RideDatasets, load_datasets
"""
from .errors import DataValidationError, NotFoundError, RideAcceptanceError
from .models import RideRecord, UserRecord
from .datasets import RideDatasets, load_datasets, load_datasets_from_dir, parse_csv

__all__ = ["UserRecord",
           "RideRecord",
             "DataValidationError",
             "NotFoundError",
             "RideAcceptanceError",
               "RideDatasets",
               "load_datasets",
               "load_datasets_from_dir",
               "parse_csv",
               ]
