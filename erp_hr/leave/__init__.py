"""Leave module — leave groups, applications and the balance calculator."""
