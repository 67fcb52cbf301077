from boiler_ots.history.csv_import import HistoryImportError, parse_history_csv
from boiler_ots.history.log import HistoryLog, HistoryPoint, sample_points
from boiler_ots.history.store import BoilerConfig, ConfigurationStore, HistoryStore

__all__ = [
    "HistoryImportError",
    "parse_history_csv",
    "HistoryLog",
    "HistoryPoint",
    "sample_points",
    "BoilerConfig",
    "ConfigurationStore",
    "HistoryStore",
]
