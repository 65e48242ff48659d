PROJECT_ID = "${var.project_id}"


def variables_block() -> dict:
    return {
        "project_id": {
            "description": "The GCP project ID where resources will be created",
            "type": "string",
        }
    }


def module_file(relative_path: str) -> str:
    """Terraform interpolation reading a file shipped next to the module."""
    return '${file("${path.module}/' + relative_path + '")}'


def dataset_dependency(dataset: str) -> list[str]:
    return [f"google_bigquery_dataset.{dataset}"]
