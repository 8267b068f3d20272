"""Data ingestion, normalization, and cached refresh of source spreadsheets."""
from .loader import parse_appointments, parse_monthly_accounts, read_table
from .store import DataStore, DatasetState
from .schemas import Appointment, MonthlyAccount, ServiceCategory, DatasetKind, IngestResult
from .transport import TransportError, fetch_csv
