"""
RSVP list export for organizers
"""

import io
from typing import List, Dict

import pandas as pd
from sqlalchemy.orm import Session

from eventrsvp.services.repositories import RsvpRepo

class ExportService:
    """Service for exporting an event's responses"""

    COLUMNS = ['First Name', 'Last Initial', 'Email', 'Status', 'Responded At', 'Updated At']
    SHEET_NAME = 'RSVPs'

    @staticmethod
    def build_rows(event_id: int, db: Session) -> List[Dict]:
        rows = []
        for rsvp in RsvpRepo.list_for_event(db, event_id):
            rows.append({
                'First Name': rsvp.first_name,
                'Last Initial': rsvp.last_initial,
                'Email': rsvp.email or '',
                'Status': rsvp.status.value,
                'Responded At': rsvp.created_at.isoformat() if rsvp.created_at else '',
                'Updated At': rsvp.updated_at.isoformat() if rsvp.updated_at else '',
            })
        return rows

    @staticmethod
    def to_dataframe(event_id: int, db: Session) -> pd.DataFrame:
        return pd.DataFrame(ExportService.build_rows(event_id, db), columns=ExportService.COLUMNS)

    @staticmethod
    def export_csv(event_id: int, db: Session) -> bytes:
        """Export responses as UTF-8 CSV"""
        df = ExportService.to_dataframe(event_id, db)
        return df.to_csv(index=False).encode('utf-8')

    @staticmethod
    def export_excel(event_id: int, db: Session) -> bytes:
        """Export responses as an Excel workbook"""
        df = ExportService.to_dataframe(event_id, db)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name=ExportService.SHEET_NAME)

        return buffer.getvalue()
