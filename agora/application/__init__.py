"""Application layer: OTP and broadcast services and their DTOs."""
