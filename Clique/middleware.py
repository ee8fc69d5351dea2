from django.conf import settings

class JWTAuthCookieMiddleware:
    """
    Lets the web client send its access token as a cookie instead of
    an Authorization header. An explicit header always wins.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.cookie_name = getattr(settings, "JWT_AUTH_COOKIE", "clique_access")

    def __call__(self, request):
        token = request.COOKIES.get(self.cookie_name)
        if not token and settings.DEBUG:
            token = request.GET.get("jwt")
        if token and "HTTP_AUTHORIZATION" not in request.META:
            if not token.lower().startswith("bearer "):
                token = f"Bearer {token}"
            request.META["HTTP_AUTHORIZATION"] = token
        return self.get_response(request)
