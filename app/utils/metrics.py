"""
Метрики Prometheus для мониторинга приложения.
"""
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Метрики HTTP запросов
http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

# Метрики проверок BOM
bom_checks_uploaded_total = Counter(
    'bom_checks_uploaded_total',
    'Total number of uploaded BOM files'
)

bom_checks_processed_total = Counter(
    'bom_checks_processed_total',
    'Total number of processed BOM checks',
    ['status']
)

bom_entries_validated_total = Counter(
    'bom_entries_validated_total',
    'Total number of validated BOM entries'
)

bom_validation_duration_seconds = Histogram(
    'bom_validation_duration_seconds',
    'BOM validation pipeline duration in seconds',
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)
)

bom_quality_score = Histogram(
    'bom_quality_score',
    'Quality score of completed BOM checks',
    buckets=(50, 60, 70, 80, 90, 95, 100)
)

validation_issues_detected_total = Counter(
    'validation_issues_detected_total',
    'Total number of detected validation issues',
    ['issue_type', 'severity']
)

# Метрики проверок документов
doc_checks_processed_total = Counter(
    'doc_checks_processed_total',
    'Total number of processed document checks',
    ['status']
)

# Метрики кеша
cache_requests_total = Counter(
    'cache_requests_total',
    'Total number of cache reads by result',
    ['result']
)

# Метрики согласования исправлений
corrections_reviewed_total = Counter(
    'corrections_reviewed_total',
    'Total number of reviewed BOM corrections',
    ['decision']
)


def get_metrics_response() -> Response:
    """Возвращает метрики в формате Prometheus."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
