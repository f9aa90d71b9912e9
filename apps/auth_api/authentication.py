import logging

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

logger = logging.getLogger(__name__)


class DualJWTAuthentication(JWTAuthentication):
    """
    Acepta el JWT en la cabecera Authorization o en la cookie httpOnly `access_token`.
    Un token inválido se trata como anónimo; los guards deciden el 401/403.
    """

    def authenticate(self, request):
        try:
            header_auth = super().authenticate(request)
            if header_auth is not None:
                return header_auth
        except (InvalidToken, TokenError) as e:
            logger.debug(f"Token de cabecera inválido: {e}")

        raw_token = request.COOKIES.get('access_token')
        if raw_token is None:
            return None

        try:
            validated_token = self.get_validated_token(raw_token)
            return (self.get_user(validated_token), validated_token)
        except (InvalidToken, TokenError) as e:
            logger.debug(f"Token de cookie inválido: {e}")
            return None
