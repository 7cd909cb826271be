"""
Request/response messages for the simulation boundary.

Three kinds travel across it:
  {"type": "run",    "params": {...raw form fields...}}
  {"type": "result", "sims": <path count>, "result": {...SimulationResult.to_dict()...}}
  {"type": "error",  "error": "<human-readable message>"}

RunRequest is lenient: a value that cannot be read as a number
becomes NaN here (never a validation failure), and inputs/validators.py turns
it into a clamped value plus a warning.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


def _lenient_float(v: Any) -> Optional[float]:
    if v is None or (isinstance(v, str) and not v.strip()):
        return None
    if isinstance(v, bool):
        return float(v)
    try:
        return float(v)
    except (TypeError, ValueError):
        return math.nan


class DemandInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    dist: str = Field("normal", validation_alias=AliasChoices("dist", "distribution"))
    mu: Optional[float] = Field(None, validation_alias=AliasChoices("mu", "mean"))
    sigma: Optional[float] = Field(None, validation_alias=AliasChoices("sigma", "std_dev", "stdDev"))

    @field_validator("mu", "sigma", mode="before")
    @classmethod
    def _coerce_number(cls, v):
        return _lenient_float(v)

    @field_validator("dist", mode="before")
    @classmethod
    def _coerce_dist(cls, v):
        return "normal" if v is None else str(v).strip().lower()


_NUMERIC_FIELDS = (
    "periods", "sims", "seed", "aov", "cogs_pct", "var_cost_pct",
    "starting_cash", "fixed_cost", "dso_days", "late_pay_pct",
    "tax_rate", "shortfall_thresh",
)


class RunRequest(BaseModel):
    """All raw run inputs, as entered on the form (percent fields are 0-100)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    periods: Optional[float] = None
    sims: Optional[float] = Field(None, validation_alias=AliasChoices("sims", "pathCount", "path_count"))
    seed: Optional[float] = None
    demand: DemandInput = Field(default_factory=DemandInput)
    aov: Optional[float] = Field(None, validation_alias=AliasChoices("aov", "avgOrderValue"))
    cogs_pct: Optional[float] = Field(None, validation_alias=AliasChoices("cogsPct", "cogs_pct"))
    var_cost_pct: Optional[float] = Field(None, validation_alias=AliasChoices("varCostPct", "var_cost_pct"))
    starting_cash: Optional[float] = Field(None, validation_alias=AliasChoices("startingCash", "starting_cash"))
    fixed_cost: Optional[float] = Field(None, validation_alias=AliasChoices("fixedCost", "fixed_cost"))
    dso_days: Optional[float] = Field(None, validation_alias=AliasChoices("dsoDays", "dso_days"))
    late_pay_pct: Optional[float] = Field(None, validation_alias=AliasChoices("latePayPct", "late_pay_pct"))
    tax_rate: Optional[float] = Field(None, validation_alias=AliasChoices("taxRate", "tax_rate"))
    shortfall_thresh: Optional[float] = Field(
        None, validation_alias=AliasChoices("shortfallThresh", "shortfall_thresh")
    )

    # raw fields that could not be read at all and fell back to defaults
    ignored_fields: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _fold_flat_demand(cls, data):
        """
        Accept demandDist / demandMu / demandSigma (or snake_case) as flat fields too.

        A `demand` value that is not an object is dropped (defaults apply) and
        its name is recorded in ignored_fields.
        """
        if not isinstance(data, dict):
            return data
        prior = data.get("ignored_fields")
        ignored = [str(x) for x in prior] if isinstance(prior, (list, tuple)) else []
        data = dict(data, ignored_fields=ignored)

        if "demand" in data and not isinstance(data["demand"], (dict, DemandInput)):
            del data["demand"]
            if "demand" not in ignored:
                ignored.append("demand")
        if "demand" in data:
            return data
        flat = {
            "dist": data.get("demandDist", data.get("demand_dist")),
            "mu": data.get("demandMu", data.get("demand_mu")),
            "sigma": data.get("demandSigma", data.get("demand_sigma")),
        }
        if any(v is not None for v in flat.values()):
            data = dict(data)
            data["demand"] = {k: v for k, v in flat.items() if v is not None}
        return data

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def _coerce_number(cls, v):
        return _lenient_float(v)


class RunMessage(BaseModel):
    type: Literal["run"] = "run"
    params: RunRequest


class ResultMessage(BaseModel):
    type: Literal["result"] = "result"
    sims: int
    result: Dict[str, Any]


class ErrorMessage(BaseModel):
    type: Literal["error"] = "error"
    error: str
