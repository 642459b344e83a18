from calli.flows.availability import AvailabilityQuery, parse_slots
from calli.flows.loaders import DataLoader
from calli.flows.submitters import MutationSubmitters

__all__ = ["AvailabilityQuery", "DataLoader", "MutationSubmitters", "parse_slots"]
