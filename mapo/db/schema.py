class SchemaV1:
    @staticmethod
    def make_light_client_lookup_key() -> bytes:
        return b"v1:map-light-client"
