from .aggregate_root import AggregateRoot as AggregateRoot
from .domain_event import DomainEvent as DomainEvent
from .entity import Entity as Entity
