OPENAPI_FROM_ENDPOINTS_PROMPT = """
You are an expert API documentation specialist. Generate a complete OpenAPI 3.0 specification based on the following detected API endpoints from a project analysis.

Project Information:
- Project Name: {project_name}
- Detected Frameworks: {frameworks}
- Total Endpoints: {endpoint_count}
- Detected API Paths: {detected_paths}

Detected Endpoints:
{endpoints_list}

Instructions:
1. Generate a complete and valid OpenAPI 3.0 specification in YAML format
2. Create an appropriate info section with title, version, and description
3. Define all detected endpoints under the paths section
4. For each endpoint:
   - Use the detected HTTP method and path
   - Convert framework path parameters such as :id into OpenAPI {{id}} form
   - Generate appropriate operation descriptions based on the path structure
   - Create reasonable request/response schemas based on RESTful conventions
   - Add parameter definitions for path/query parameters inferred from the URL
5. Create reusable schemas in the components section
6. Add proper tags for grouping related endpoints
7. Include security schemes if authentication patterns are detected
8. Ensure all references and schemas are properly defined

Generate ONLY the OpenAPI YAML specification, with no additional explanation or markdown formatting.

OpenAPI Specification:
"""

OPENAPI_FROM_LIVE_API_PROMPT = """
You are an expert API analyst. Your task is to generate a complete and accurate OpenAPI 3.0 specification for the given API endpoint.

API Information:
- URL: {api_url}
- HTTP Method: {method}
{response_section}

Instructions:
1. Analyze the API URL, method, and response (if available)
2. Generate a complete OpenAPI 3.0 specification in YAML format
3. Include all standard OpenAPI components: info, servers, paths, components
4. Infer request parameters from the URL structure
5. If response data is available, create accurate schema definitions
6. If the response is not available, create a reasonable schema based on the URL and common REST patterns
7. Use proper data types and formats
8. Include security schemes if authentication appears to be required

Generate ONLY the OpenAPI YAML specification, with no additional explanation or markdown formatting.

OpenAPI Specification:
"""

CONNECTION_TEST_PROMPT = 'Say "OK" if you can read this.'


def format_endpoints_prompt(project_name: str, frameworks: str, detected_paths: str,
                            endpoints_list: str, endpoint_count: int) -> str:
    """Format the OpenAPI drafting prompt for statically detected endpoints"""
    return OPENAPI_FROM_ENDPOINTS_PROMPT.format(
        project_name=project_name,
        frameworks=frameworks or "Unknown",
        detected_paths=detected_paths,
        endpoints_list=endpoints_list,
        endpoint_count=endpoint_count,
    )


def format_live_api_prompt(api_url: str, method: str, api_response: str, api_error: str) -> str:
    """Format the OpenAPI drafting prompt for a live API sample"""
    if api_error:
        response_section = f"- Error fetching API: {api_error}"
    else:
        response_section = f"- API Response Sample:\n{api_response[:1000]}"
    return OPENAPI_FROM_LIVE_API_PROMPT.format(
        api_url=api_url,
        method=method,
        response_section=response_section,
    )
