from protobuf_to_json.cli import app

app(prog_name="pb2json")
