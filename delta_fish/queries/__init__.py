from .filters import available_species, date_bounds, filter_observations, slice_observations
from .metrics import kpis_block, cpue_by_date, species_ranking

__all__ = [
    "available_species",
    "date_bounds",
    "filter_observations",
    "slice_observations",
    "kpis_block",
    "cpue_by_date",
    "species_ranking",
]
