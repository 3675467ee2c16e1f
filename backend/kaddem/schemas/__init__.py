"""
kaddem.schemas

Package des schémas API (Pydantic).

Rôle (fonctionnel) :
- Définit les modèles d’entrée/sortie utilisés par l’API (request/response).
- Sépare clairement :
  - les modèles ORM (kaddem.models) = persistance DB
  - les schémas Pydantic (kaddem.schemas) = contrat HTTP / validation

Convention :
- JSON en camelCase (idContrat, dateDebutContrat…) pour rester compatible avec le front existant ;
  les entrées acceptent aussi le snake_case (populate_by_name).
"""
