"""Basic feed: CloudWatch aggregate metrics of the AWS/RDS namespace."""

from rdsexporter.core.basic.catalog import METRICS, CatalogMetric
from rdsexporter.core.basic.scraper import BasicScraper

__all__ = ["METRICS", "BasicScraper", "CatalogMetric"]
