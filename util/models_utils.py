from bson import ObjectId


def custom_encoder(obj):
    """
    Recursively encodes Mongo documents into JSON-ready values.
    ObjectIds become strings; datetimes are left for the JSON layer.
    """
    if isinstance(obj, ObjectId):
        return str(obj)
    elif isinstance(obj, dict):
        return {k: custom_encoder(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple, set)):
        return [custom_encoder(v) for v in obj]
    else:
        return obj


def serialize_document(doc):
    """Turn a stored document into its API shape: `_id` is exposed as `id`."""
    if doc is None:
        return None
    data = custom_encoder(doc)
    if "_id" in data:
        data["id"] = data.pop("_id")
    return data


def serialize_documents(docs):
    return [serialize_document(doc) for doc in docs]
