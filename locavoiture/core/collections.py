"""Noms des collections du backend documentaire."""

CARS = "cars"
RESERVATIONS = "reservations"
EMPLOYEES = "employees"
CUSTOMERS = "utilisateurs"
PROFILES = "users"

# Ordre de lecture des fiches profil pour un identifiant donné
PROFILE_COLLECTIONS = (CUSTOMERS, PROFILES, EMPLOYEES)
