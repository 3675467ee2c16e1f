"""
kaddem.core

Package “cœur” de l’application : tout ce qui est transversal (cross-cutting concerns),
indépendant des domaines métier (contrats, étudiants) et du reporting sécurité.

- settings
  Configuration centralisée (variables d’environnement, .env) : DB, quota de contrats,
  job quotidien, seuils du quality gate sécurité.

- errors
  Format d’erreur API uniforme (code, message, status, request_id, timestamp) et exceptions
  applicatives (AppHTTPException côté API, ReportingError côté CI).

- logging
  Logs JSON sur stdout, enrichis du request_id et d’extras structurés.

- request_id
  Identifiant de corrélation d’une requête (ContextVar).

- security / rate_limit
  Clé API pour les opérations sensibles et limitation de débit en mémoire.

En résumé :
- kaddem.core = infrastructure + conventions (config, logs, erreurs, middlewares)
- kaddem.api / kaddem.services / kaddem.models = endpoints + logique métier + persistance
- kaddem.reporting = agrégation des rapports de scanners (pipeline CI)
"""
