import os
import time

from flask import current_app
from werkzeug.utils import secure_filename

from .errors import ValidationError


def save_submission_file(file_storage, assignment_id: int) -> str:
    """Store an uploaded file under UPLOAD_FOLDER/<assignment_id>/ and return
    its relative URL."""
    if file_storage is None or not file_storage.filename:
        raise ValidationError("Invalid or no file uploaded")
    name = secure_filename(file_storage.filename)
    if not name:
        raise ValidationError("Invalid file name")

    folder = os.path.join(current_app.config["UPLOAD_FOLDER"], str(assignment_id))
    os.makedirs(folder, exist_ok=True)
    filename = f"{int(time.time() * 1000)}-{name}"
    file_storage.save(os.path.join(folder, filename))
    current_app.logger.info("Stored upload %s for assignment %s", filename, assignment_id)
    return f"/uploads/{assignment_id}/{filename}"
