"""Incident / no-incident gate over a classifier score distribution."""

from dataclasses import dataclass
from typing import Mapping, Optional, Union

NO_INCIDENT_LABEL = "No_Incident"


@dataclass(frozen=True)
class NoIncident:
    score: float = 0.0


@dataclass(frozen=True)
class Incident:
    label: str
    score: float


IncidentDecision = Union[NoIncident, Incident]


def decide_incident(classification: Mapping[str, Optional[float]]) -> IncidentDecision:
    """
    Pick the highest-scoring label, scanning in mapping order.

    Starts from (No_Incident, 0); only a strictly greater score replaces the
    running best, so ties keep the earlier label and an empty or non-positive
    mapping stays NoIncident. Labels with a null score are skipped.
    """
    best_label = NO_INCIDENT_LABEL
    best_score = 0.0
    for label, score in classification.items():
        if score is not None and score > best_score:
            best_label = label
            best_score = score

    if best_label == NO_INCIDENT_LABEL:
        return NoIncident(score=best_score)
    return Incident(label=best_label, score=best_score)
