"""
kaddem.services

Package “services” : logique applicative (use-cases) indépendante des endpoints HTTP.

Rôle (fonctionnel) :
- contrat_service : CRUD des contrats, affectation à un étudiant (quota), comptage des contrats
  valides, mise à jour des statuts (archivage), chiffre d’affaires entre deux dates.
- etudiant_service : CRUD minimal des étudiants (référentiel pour l’affectation).
- status_job : exécution quotidienne de la mise à jour des statuts (tâche asyncio).

Principe :
- kaddem.api = transport HTTP (routes, validation, dépendances)
- kaddem.services = orchestration métier (réutilisable, testable, mockable dans les tests API)
- kaddem.models / kaddem.schemas = persistance et contrats
"""
