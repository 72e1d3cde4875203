"""Decode, convert and instrument query responses."""
import time
import logging
from typing import Any, List, Optional, Tuple

from promconv.config import Config
from promconv.conv import Observation, convert
from promconv.decode import MalformedPayload, decode_query_result
from promconv.metrics import SelfMetrics
from promconv.series import Empty
from promconv.templates import TemplateRenderer, build_function_registry

logger = logging.getLogger(__name__)


class NormalizerEngine:
    """Ties the decoder, normalizer, renderer and self-metrics together."""

    def __init__(self, config: Optional[Config] = None, self_metrics: Optional[SelfMetrics] = None):
        self.config = config or Config()
        self.self_metrics = self_metrics
        if self.self_metrics is None and self.config.self_metrics.enabled:
            self.self_metrics = SelfMetrics(prefix=self.config.self_metrics.prefix)

        self.renderer = TemplateRenderer(build_function_registry(), self.config.templates)
        logger.info(
            f"Normalizer engine initialized: empty_series={self.config.convert.empty_series}, "
            f"templates={len(self.config.templates)}"
        )

    def normalize(self, payload: Any) -> Tuple[str, List[Observation]]:
        """
        Convert a raw query response.

        Returns:
            The decoded result type and the observations. Malformed payloads
            are counted and yield no observations.
        """
        start = time.time()
        try:
            result = decode_query_result(payload, strict=True)
        except MalformedPayload as e:
            logger.warning(f"Malformed query payload, treating as no data: {e}")
            if self.self_metrics:
                self.self_metrics.record_malformed()
            result = Empty()

        observations = convert(result, empty_series=self.config.convert.empty_series)
        result_type = result.result_type

        if self.self_metrics:
            self.self_metrics.record_conversion(result_type, len(observations), time.time() - start)

        logger.debug(f"Converted {result_type} result into {len(observations)} observations")
        return result_type, observations

    def render_observation(self, template_text: str, observation: Observation) -> str:
        """Render a template with an observation's fields as variables."""
        context = observation.to_dict()
        context["readable_value"] = observation.readable_value()
        return self.renderer.render("observation", template_text, context)
