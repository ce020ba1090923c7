from vagas_api.infrastructure.auth.jwt_identity_resolver import JWTIdentityResolver

__all__ = ["JWTIdentityResolver"]
