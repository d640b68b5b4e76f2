from rest_framework import authentication


class SessionAuthentication(authentication.SessionAuthentication):
    """Session auth that answers unauthenticated requests with 401.

    DRF only sends 401 when the first authenticator provides a
    ``WWW-Authenticate`` value; the stock session class does not, which
    turns every missing session into 403.
    """

    def authenticate_header(self, request):
        return 'Session realm="api"'
