from swu_pricer.engine.anomalies import Anomaly, AnomalyKind, AnomalyLog
from swu_pricer.engine.catalog_batch import build_catalog_batch, generate_product_id
from swu_pricer.engine.matching import build_search_phrase, normalize_name, select_product
from swu_pricer.engine.report import build_price_report

__all__ = [
    "Anomaly",
    "AnomalyKind",
    "AnomalyLog",
    "build_catalog_batch",
    "build_price_report",
    "build_search_phrase",
    "generate_product_id",
    "normalize_name",
    "select_product",
]
