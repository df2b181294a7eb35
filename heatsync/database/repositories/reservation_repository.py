from heatsync.database.connection import get_connection


class ReservationRepository:
    """In-flight markers for extractions, one row per (pdf_id, swimmer) pair."""

    def acquire(
        self,
        pdf_id: str,
        swimmer_name_normalized: str,
        token: str,
        ttl_seconds: int,
    ) -> bool:
        """Take the reservation if it is free or expired. Returns True on success."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO extraction_reservations (
                        pdf_id, swimmer_name_normalized, token, expires_at
                    )
                    VALUES (%s, %s, %s, NOW() + %s * INTERVAL '1 second')
                    ON CONFLICT (pdf_id, swimmer_name_normalized) DO UPDATE
                    SET token = EXCLUDED.token, expires_at = EXCLUDED.expires_at
                    WHERE extraction_reservations.expires_at < NOW()
                    RETURNING token
                    """,
                    (pdf_id, swimmer_name_normalized, token, ttl_seconds),
                )
                row = cur.fetchone()
            conn.commit()
        return row is not None

    def release(self, pdf_id: str, swimmer_name_normalized: str, token: str) -> None:
        """Drop the reservation, but only if this token still holds it."""
        with get_connection() as conn:
            conn.execute(
                """
                DELETE FROM extraction_reservations
                WHERE pdf_id = %s AND swimmer_name_normalized = %s AND token = %s
                """,
                (pdf_id, swimmer_name_normalized, token),
            )
            conn.commit()

    def is_held(self, pdf_id: str, swimmer_name_normalized: str) -> bool:
        """True while an unexpired reservation exists for the pair."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT 1 FROM extraction_reservations
                    WHERE pdf_id = %s AND swimmer_name_normalized = %s
                      AND expires_at > NOW()
                    """,
                    (pdf_id, swimmer_name_normalized),
                )
                row = cur.fetchone()
        return row is not None
