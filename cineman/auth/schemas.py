from cineman.responses import CamelModel

# Requests carry plain strings; format and policy checks happen in the
# service so they surface as catalogued errors rather than 422s.
class RegisterUserRequest(CamelModel):
    email: str = ""
    password: str = ""

class LoginRequest(CamelModel):
    email: str = ""
    password: str = ""

class AccessTokenRequest(CamelModel):
    refresh_token: str = ""

class ConfirmEmailRequest(CamelModel):
    token: str = ""

class ChangeEmailRequest(CamelModel):
    new_email: str = ""

class ChangePasswordRequest(CamelModel):
    old_password: str = ""
    new_password: str = ""

class ForgotPasswordRequest(CamelModel):
    email: str = ""

class ResetPasswordRequest(CamelModel):
    email: str = ""
    token: str = ""
    new_password: str = ""

class TokenResponse(CamelModel):
    token: str
    token_type: str = "bearer"
