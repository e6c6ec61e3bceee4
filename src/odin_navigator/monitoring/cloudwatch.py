"""CloudWatch sink for governor metrics.

Install with the ``cloudwatch`` extra. Pass a CloudWatchPublisher as the
MetricsCollector publisher.
"""

import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError

from odin_navigator.common.constants import MonitoringConstants
from odin_navigator.monitoring.metrics import MetricPoint

logger = logging.getLogger(__name__)


class CloudWatchPublisher:
    """Publishes metric batches to CloudWatch."""

    DEFAULT_REGION = "us-east-1"

    def __init__(
        self,
        namespace: str = MonitoringConstants.DEFAULT_CLOUDWATCH_NAMESPACE,
        region: Optional[str] = None,
        aws_profile: Optional[str] = None,
    ):
        self.namespace = namespace
        self.region = region or self.DEFAULT_REGION

        if aws_profile:
            session = boto3.Session(profile_name=aws_profile)
            self.cloudwatch = session.client("cloudwatch", region_name=self.region)
        else:
            self.cloudwatch = boto3.client("cloudwatch", region_name=self.region)

        logger.info(f"Initialized CloudWatchPublisher: namespace={self.namespace}")

    @staticmethod
    def to_metric_datum(metric: MetricPoint) -> Dict[str, Any]:
        metric_dict = {
            "MetricName": metric.metric_name,
            "Value": metric.value,
            "Unit": metric.unit,
            "Timestamp": metric.timestamp,
        }
        if metric.dimensions:
            metric_dict["Dimensions"] = [
                {"Name": k, "Value": str(v)}
                for k, v in metric.dimensions.items()
            ]
        return metric_dict

    def __call__(self, batch: List[MetricPoint]) -> None:
        """Write a batch of metrics.

        Raises:
            IOError: If CloudWatch write fails
        """
        metric_data = [self.to_metric_datum(metric) for metric in batch]
        chunk = MonitoringConstants.CLOUDWATCH_MAX_BATCH

        try:
            for i in range(0, len(metric_data), chunk):
                self.cloudwatch.put_metric_data(
                    Namespace=self.namespace,
                    MetricData=metric_data[i:i + chunk],
                )
        except ClientError as e:
            logger.error(f"Failed to publish metrics: {e}")
            raise IOError(f"CloudWatch write failed: {e}") from e

        logger.debug(f"Published {len(metric_data)} metrics to CloudWatch")
