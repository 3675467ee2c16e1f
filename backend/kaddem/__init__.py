"""
kaddem

Package racine du backend Kaddem (gestion des contrats étudiants) et de l’outillage
de reporting sécurité utilisé par le pipeline CI.

Organisation (haute-level) :
- kaddem.api       : routes FastAPI (contrats HTTP, dépendances, sérialisation)
- kaddem.core      : briques transverses (settings, errors, logs, sécurité, rate-limit…)
- kaddem.db        : base SQLAlchemy + session async
- kaddem.models    : modèles ORM (Contrat, Etudiant)
- kaddem.schemas   : schémas Pydantic (entrées/sorties API)
- kaddem.services  : logique métier (contrats, étudiants, job quotidien)
- kaddem.reporting : parsing des rapports de scanners + dashboard HTML exécutif
"""

__version__ = "1.0.0"
