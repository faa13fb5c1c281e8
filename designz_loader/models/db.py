# designz_loader/models/db.py
from tortoise import fields
from tortoise.models import Model


class UploadSession(Model):
    id = fields.IntField(pk=True)
    # created → validating → valid|invalid → queued → uploading → uploaded|upload_failed
    status = fields.CharField(max_length=20, default="created")
    generation = fields.IntField(default=0)
    design_count = fields.IntField(default=0)
    meta = fields.JSONField(default=dict)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)
