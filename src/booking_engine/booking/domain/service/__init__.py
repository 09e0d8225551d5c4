from . import passenger_rules as passenger_rules
