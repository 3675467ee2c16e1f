"""
scripts

Package utilitaire pour les scripts de maintenance / CI.

Rôle (fonctionnel) :
- Contient des scripts exécutables (CLI) liés au projet :
  - seed_demo : génération d’étudiants et de contrats de démonstration
  - security_report : agrégation des rapports de scanners en dashboard (étape CI)

Note :
- Les scripts ne contiennent pas de logique métier “centrale” :
  ils orchestrent et appellent les modules de `kaddem/` (services, reporting, db…).
"""
